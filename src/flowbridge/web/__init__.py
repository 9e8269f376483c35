"""HTTP surface over the converter and validator."""
