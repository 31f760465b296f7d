"""depsupdater: upgrade pinned NuGet, npm and .NET SDK versions in a project tree."""

__version__ = "0.1.0"
