"""devgod identity."""

__version__ = "0.3.0"
__codename__ = "DEVGOD"
__tagline__ = "One intent. One branch. One clean PR."

BANNER = r"""
     _                          _
  __| | _____   ____ _  ___   __| |
 / _` |/ _ \ \ / / _` |/ _ \ / _` |
| (_| |  __/\ V / (_| | (_) | (_| |
 \__,_|\___| \_/ \__, |\___/ \__,_|
                 |___/
"""
