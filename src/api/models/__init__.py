"""Request and response models for the booking API."""
