"""
shift_kernel -- infrastructure for the staff shift settlement system.

Structured logging, typed exceptions, the clock abstraction, lenient
numeric coercion, SQLAlchemy persistence (base, engine, models) and the
service base class.  The kernel never imports ``shift_engines``,
``shift_services`` or ``shift_config``.
"""

__version__ = "0.1.0"
