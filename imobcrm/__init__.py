"""imobcrm: real-estate CRM with simulated multi-platform listing publication."""

__version__ = "0.1.0"
