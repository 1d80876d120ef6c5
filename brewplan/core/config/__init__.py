"""Loading of descriptors and facts snapshots."""
