"""JWT Pizza terminal storefront."""
