"""Bridge between a HomeKit-style accessory host and Schmidt scoreboards."""
