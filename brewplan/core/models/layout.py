"""
Layout — where an installed package ends up.

The compiler never touches the filesystem; it only renders these paths
into command arguments. The root defaults to ``/usr/local`` and can be
moved with ``BREWPLAN_ROOT`` or ``--root``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Layout(BaseModel):
    """Install-location conventions rendered into plan variables."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    root: str = "/usr/local"

    @property
    def cellar(self) -> str:
        return f"{self.root}/Cellar"

    def prefix(self, name: str, pkg_version: str) -> str:
        """Keg path of one installed version."""
        return f"{self.cellar}/{name}/{pkg_version}"

    def opt_prefix(self, name: str) -> str:
        """Version-independent link to the linked keg of ``name``."""
        return f"{self.root}/opt/{name}"

    def variables(self, name: str, pkg_version: str) -> dict[str, str]:
        """Path variables available to descriptor templates."""
        prefix = self.prefix(name, pkg_version)
        return {
            "root": self.root,
            "cellar": self.cellar,
            "prefix": prefix,
            "bin": f"{prefix}/bin",
            "lib": f"{prefix}/lib",
            "include": f"{prefix}/include",
            "share": f"{prefix}/share",
            "elisp": f"{prefix}/share/emacs/site-lisp/{name}",
            "opt_prefix": self.opt_prefix(name),
        }
