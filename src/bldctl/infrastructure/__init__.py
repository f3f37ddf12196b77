"""Infrastructure layer: subprocesses, git, and descriptor file I/O."""
