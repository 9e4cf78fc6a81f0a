"""Test package marker so pytest can use package-relative imports."""
