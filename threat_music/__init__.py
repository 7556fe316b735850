"""Threat music pack builder: regions of day/night threat layers + ambient music, exported as customMusic/."""
