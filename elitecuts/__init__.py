"""
Elite Cuts barbershop booking: slot computation, booking flow and admin tools.
"""

__version__ = "0.1.0"
