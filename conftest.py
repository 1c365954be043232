"""Root conftest: puts the project root on sys.path so ``src`` imports resolve."""
