"""SmartCharge charging-station recommendation core."""

__version__ = "1.0.0"
