"""HTTP area search service over the establishment dataset."""
