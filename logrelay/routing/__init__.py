"""logrelay routing — maps supervisor events to per-application relays.

The router is the single subscriber to the supervisor's event stream.
Each event names its application; the router hands it to the relay that
was registered for that application, and drops it otherwise.
"""

from logrelay.routing.router import LogRouter, RelayRegistrationError

__all__ = ["LogRouter", "RelayRegistrationError"]
