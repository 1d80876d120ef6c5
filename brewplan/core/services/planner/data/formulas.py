"""
L0 Data — Built-in formula catalog.

Raw descriptor dicts keyed by formula name. They go through the same
``PackageDescriptor.model_validate`` + ``validate_descriptor`` path as
YAML descriptors, so every field documented in
``brewplan.core.models.descriptor`` can be used here.
"""

from __future__ import annotations

STD_CMAKE_ARGS: list[str] = [
    "-DCMAKE_C_FLAGS_RELEASE=-DNDEBUG",
    "-DCMAKE_CXX_FLAGS_RELEASE=-DNDEBUG",
    "-DCMAKE_INSTALL_PREFIX={prefix}",
    "-DCMAKE_BUILD_TYPE=Release",
    "-DCMAKE_FIND_FRAMEWORK=LAST",
    "-DCMAKE_VERBOSE_MAKEFILE=ON",
    "-Wno-dev",
]

_NOT_MAC = {"fact": "os_family", "not_equals": "macos"}
_IS_MAC = {"fact": "os_family", "equals": "macos"}

# Boost.Context is x86_64 assembly: no PPC, no 32-bit, no universal.
_NO_CONTEXT = {
    "any": [
        {"fact": "arch", "in": ["ppc", "ppc64"]},
        {"fact": "word_size", "equals": 32},
        "universal",
    ],
}
_OLD_GCC = {"fact": "compiler", "in": ["gcc", "llvm"]}


_BOOST_TEST_CPP = """\
#include <boost/algorithm/string.hpp>
#include <string>
#include <vector>
#include <assert.h>
using namespace boost::algorithm;
using namespace std;

int main()
{
  string str("a,b");
  vector<string> strVec;
  split(strVec, str, is_any_of(","));
  assert(strVec.size()==2);
  assert(strVec[0]=="a");
  assert(strVec[1]=="b");
  return 0;
}
"""


FORMULAS: dict[str, dict] = {
    # ── boost ──────────────────────────────────────────────────
    "boost": {
        "name": "boost",
        "version": "1.61.0",
        "revision": 1,
        "desc": "Collection of portable C++ source libraries",
        "homepage": "https://www.boost.org/",
        "source": {
            "url": "https://downloads.sourceforge.net/project/boost/boost/1.61.0/boost_1_61_0.tar.bz2",
            "digest": "a547bd06c2fd9a71ba1d169d9cf0339da7ebf4753849a8f7d6fdb8feee99b640",
        },
        "head": {"url": "https://github.com/boostorg/boost.git"},
        "patches": [
            {
                # optional_fwd.hpp before boost/config.hpp (boostorg/optional#19)
                "url": "https://github.com/boostorg/optional/commit/844ca6a0.patch",
                "digest": "1ef54ca1dcd12d809e2a01b558113fcd734d992402d2ec78c387298ef29cc887",
                "strip": 2,
                "applies": "<1.62.0",
            },
        ],
        "bottle": {
            "cellar": "any",
            "digests": {
                "el_capitan": "0c06f4558c5f98e5615cb9a33b66ab912e702ad50a2e1051ae80171b0bda9aa3",
                "yosemite": "508bfe58b3ba391690be77da7a47a34f2cf0b489cc2590c69c746d7919fa12c1",
                "mavericks": "92db134e4a77c4cc0566261b09b96886b30f6c1bf81d65b120dffd6937e99f58",
                "x86_64_linux": "d59b379fc3a39f0e72ff7222c40bc3177f91b2210d96254a68db5886adf5144d",
            },
        },
        "options": [
            {
                "name": "universal",
                "description": "Build a universal binary",
            },
            {
                "name": "icu4c",
                "description": "Build regexp engine with icu support",
                "deprecated_names": ["icu"],
                "flags": {
                    "bootstrap": {
                        "true": ["--with-icu={deps.icu4c}"],
                        "false": ["--without-icu"],
                    },
                },
            },
            {
                "name": "single",
                "description": "Build single-threading variant",
                "default": True,
            },
            {
                "name": "static",
                "description": "Build static library variant",
                "default": True,
            },
            {
                "name": "mpi",
                "description": "Build with MPI support",
            },
            {
                "name": "cxx11",
                "description": "Build using C++11 mode",
            },
        ],
        "dependencies": [
            {"name": "icu4c", "option": "icu4c", "tags": ["c++11"], "when": "cxx11"},
            {"name": "open-mpi", "option": "mpi", "tags": ["c++11"], "when": "cxx11"},
            {"name": "icu4c", "option": "icu4c", "when": "!cxx11"},
            {"name": "mpi", "option": "mpi", "tags": ["cc", "cxx"], "when": "!cxx11"},
            {"name": "bzip2", "when": _NOT_MAC},
        ],
        "rules": [
            {
                "kind": "conflict",
                "options": [
                    {"option": "mpi", "equals": True},
                    {"option": "single", "equals": True},
                ],
                "hint": (
                    "Building MPI support for both single and multi-threaded "
                    "flavors is not supported. Please use --with-mpi together "
                    "with --without-single."
                ),
            },
            {
                "kind": "toolchain",
                "compiler": "llvm",
                "build": 2335,
                "cause": "Dropped arguments to functions when linking with boost",
            },
            {"kind": "needs", "feature": "cxx11", "when": "cxx11"},
        ],
        "build": {
            "prepare": [
                {
                    # Force boost to compile with the desired compiler
                    "path": "user-config.jam",
                    "mode": "append",
                    "lines": [
                        {"value": "using darwin : : {cxx} ;", "when": _IS_MAC},
                        {"value": "using gcc : : {cxx} ;", "when": _NOT_MAC},
                        {"value": "using mpi ;", "when": "mpi"},
                    ],
                },
            ],
            # Keep memory below 4 GB on CircleCI
            "job_overrides": [{"jobs": 6, "when": {"fact": "env.CIRCLECI", "present": True}}],
            "steps": [
                {
                    "id": "bootstrap",
                    "phase": "configure",
                    "executable": "./bootstrap.sh",
                    "args": [
                        "--prefix={prefix}",
                        "--libdir={lib}",
                        {
                            "format": "--without-libraries={items}",
                            "separator": ",",
                            "items": [
                                "python",
                                {"value": "context", "when": _NO_CONTEXT},
                                {"value": "coroutine", "when": _NO_CONTEXT},
                                {"value": "log", "when": _OLD_GCC},
                                {"value": "mpi", "when": "!mpi"},
                            ],
                        },
                    ],
                },
                {
                    "id": "headers",
                    "executable": "./b2",
                    "args": ["headers"],
                },
                {
                    "id": "install",
                    "executable": "./b2",
                    "args": [
                        "--prefix={prefix}",
                        "--libdir={lib}",
                        "-d2",
                        "-j{jobs}",
                        "--layout=tagged",
                        "--user-config=user-config.jam",
                        "install",
                        {"value": "threading=multi,single", "when": "single"},
                        {"value": "threading=multi", "when": "!single"},
                        {"value": "link=shared,static", "when": "static"},
                        {"value": "link=shared", "when": "!static"},
                        {"value": "address-model=32_64", "when": "universal"},
                        {"value": "architecture=x86", "when": "universal"},
                        {"value": "pch=off", "when": "universal"},
                        # -std=c++11 must precede -stdlib=libc++
                        {"value": "cxxflags=-std=c++11", "when": "cxx11"},
                        {
                            "value": "cxxflags=-stdlib=libc++",
                            "when": {"all": ["cxx11", {"fact": "compiler", "equals": "clang"}]},
                        },
                        {
                            "value": "linkflags=-stdlib=libc++",
                            "when": {"all": ["cxx11", {"fact": "compiler", "equals": "clang"}]},
                        },
                        # bzlib.h and -lbz2 live under the root on Linux
                        {"value": "include={root}/include", "when": _NOT_MAC},
                        {"value": "linkflags=-L{root}/lib", "when": _NOT_MAC},
                    ],
                },
            ],
        },
        "caveats": [
            {
                "text": "Building of Boost.Log is disabled because it requires newer GCC or Clang.",
                "when": _OLD_GCC,
                "source_only": True,
            },
            {
                "text": (
                    "Building of Boost.Context and Boost.Coroutine is disabled as they are "
                    "only supported on x86_64."
                ),
                "when": _NO_CONTEXT,
                "source_only": True,
            },
        ],
        "test": {
            "files": [{"path": "test.cpp", "lines": [_BOOST_TEST_CPP.rstrip("\n")]}],
            "setup": [
                {
                    "executable": "{cxx}",
                    "args": ["test.cpp", "-std=c++1y", "-L{lib}", "-lboost_system", "-o", "test"],
                },
            ],
            "command": {"executable": "./test"},
            "expect_exit_code": 0,
        },
    },

    # ── libsoxr ────────────────────────────────────────────────
    "libsoxr": {
        "name": "libsoxr",
        "version": "0.1.2",
        "desc": "High quality, one-dimensional sample-rate conversion library",
        "homepage": "https://sourceforge.net/projects/soxr/",
        "source": {
            "url": "https://downloads.sourceforge.net/project/soxr/soxr-0.1.2-Source.tar.xz",
            "digest": "54e6f434f1c491388cd92f0e3c47f1ade082cc24327bdc43762f7d1eefe0c275",
            "mirrors": [
                "https://mirrorservice.org/sites/ftp.debian.org/debian/pool/main/libs/libsoxr/libsoxr_0.1.2.orig.tar.xz",
            ],
        },
        "bottle": {
            "cellar": "any",
            "digests": {
                "el_capitan": "077ef8de96bc1d6e91c102a1ef37a8abdfc5a5c58e630ddf4c71d588f4928514",
                "yosemite": "b4a93f140c6811066af0a9c4ed5018426cacd57708aeed413b81ff887823926e",
                "mavericks": "ab97e9c831858081a06933a5394623b8e4dbafd660e507cfbe851dee07c73c09",
                "x86_64_linux": "55fd913abd961958bd99944771851f1f1bcabbf2c58751fa1a6e718144c9b1a6",
            },
        },
        "dependencies": [{"name": "cmake", "build_only": True}],
        "build": {
            "steps": [
                {
                    "id": "cmake",
                    "phase": "configure",
                    "executable": "cmake",
                    "args": [".", *STD_CMAKE_ARGS],
                },
                {"id": "install", "executable": "make", "args": ["install"]},
            ],
        },
    },

    # ── sysdig ─────────────────────────────────────────────────
    "sysdig": {
        "name": "sysdig",
        "version": "0.1.91",
        "homepage": "http://www.sysdig.org/",
        "source": {
            "url": "https://github.com/draios/sysdig/archive/0.1.91.tar.gz",
            "digest": "6bb8bbcc74b144678e18446e71a519e2d2dfd28a",
            "digest_type": "sha1",
        },
        "head": {"url": "https://github.com/draios/sysdig.git", "branch": "master"},
        "resources": [
            {
                "name": "sample_file",
                "url": "https://gist.githubusercontent.com/juniorz/9986999/raw/a3556d7e93fa890a157a33f4233efaf8f5e01a6f/sample.scap",
                "digest": "0aa3c30b954f9fb0d7320d900d3a103ade6b1cec",
                "digest_type": "sha1",
            },
        ],
        "bottle": {
            "cellar": "any",
            "digest_type": "sha1",
            "digests": {
                "yosemite": "254b92f945f9a7ad381ea5406ad35319c66113c2",
                "mavericks": "230d9573e0a511573a5768eaaa8802c1ddf4390f",
                "mountain_lion": "ef0dbf574dd5f68ed29639e8f923ab1eed321329",
            },
        },
        "dependencies": [{"name": "cmake", "build_only": True}],
        "build": {
            "env": [
                {
                    # libc++ before Mavericks must be requested explicitly
                    "name": "CXXFLAGS",
                    "value": "-stdlib=libc++",
                    "when": {"all": [_IS_MAC, {"fact": "os_version", "version_lt": "10.9"}]},
                },
            ],
            "steps": [
                {"id": "mkdir", "phase": "configure", "executable": "mkdir", "args": ["-p", "build"]},
                {
                    "id": "cmake",
                    "phase": "configure",
                    "executable": "cmake",
                    "args": ["..", "-DSYSDIG_VERSION={version}", *STD_CMAKE_ARGS],
                    "cwd": "build",
                },
                {"id": "install", "executable": "make", "args": ["install"], "cwd": "build"},
            ],
        },
        "test": {
            "setup": [
                {"executable": "mkdir", "args": ["-p", "{share}/demos"]},
                {"executable": "cp", "args": ["sample_file/sample.scap", "{share}/demos/"]},
                {"executable": "{bin}/sysdig", "args": ["-cl"]},
            ],
            "command": {
                "executable": "{bin}/sysdig",
                "args": [
                    "-r", "{share}/demos/sample.scap",
                    "-p", "%evt.num %evt.type %evt.args",
                    "evt.type=open", "fd.name", "contains", "/tmp/sysdig/sample.scap",
                ],
            },
            "expect_stdout": (
                "1 open fd=5(<f>/tmp/sysdig/sample.scap) name=sample.scap(/tmp/sysdig/sample.scap) "
                "flags=262(O_TRUNC|O_CREAT|O_WRONLY) mode=0"
            ),
        },
    },

    # ── apel ───────────────────────────────────────────────────
    "apel": {
        "name": "apel",
        "version": "10.8",
        "desc": "Emacs Lisp library to help write portable Emacs programs",
        "homepage": "http://git.chise.org/elisp/apel/",
        "source": {
            "url": "http://git.chise.org/elisp/dist/apel/apel-10.8.tar.gz",
            "digest": "a511cc36bb51dc32b4915c9e03c67a994060b3156ceeab6fafa0be7874b9ccfe",
        },
        "bottle": {
            "cellar": "any_skip_relocation",
            "digests": {
                "el_capitan": "f47d90fd2aea06a0e52a75b84af03c7a97f479f00f621168eb5afb6f911e999f",
                "yosemite": "90038f974eb80c5d670990f349a13d629e2139098720ca13b5a26c7c9a8c9360",
                "mavericks": "00acef6949043235fc8a613c1d5dc9f58d8e365bde486d42461fc89449ff834b",
                "x86_64_linux": "64848e503581ebb1242cfe0924ebffa2c805b5213ae11541571f11bcb30c7dc9",
            },
        },
        "build": {
            "steps": [
                {
                    "id": "install",
                    "executable": "make",
                    "args": [
                        "install",
                        "PREFIX={prefix}",
                        "LISPDIR={elisp}",
                        "VERSION_SPECIFIC_LISPDIR={elisp}",
                    ],
                },
            ],
        },
        "test": {
            "files": [
                {
                    "path": "test-apel.el",
                    "lines": [
                        "(add-to-list 'load-path \"{elisp}/emu\")",
                        "(require 'poe)",
                        "(print (minibuffer-prompt-width))",
                    ],
                },
            ],
            "command": {"executable": "emacs", "args": ["-Q", "--batch", "-l", "test-apel.el"]},
            "expect_stdout": "0",
        },
    },
}
