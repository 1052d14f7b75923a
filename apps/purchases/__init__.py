"""Shop policy, hire-purchase agreements and payments."""
