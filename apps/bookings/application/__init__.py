"""Use cases of the booking domain: admission, lifecycle and rule configuration."""
