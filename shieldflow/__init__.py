"""
ShieldFlow VPN - simulated VPN client dashboard
"""

__version__ = "1.0.2"
