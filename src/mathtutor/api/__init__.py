"""HTTP surface of the tutor backend."""
