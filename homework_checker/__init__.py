"""Homework Checker package.

Keep package import lightweight; import heavy submodules explicitly where needed.
"""

__version__ = "1.0.0"
__all__ = [
	"checker",
	"client",
	"config",
	"coverage",
	"exceptions",
	"models",
	"policy",
	"roster",
	"streak",
	"text",
	"workdays",
]
