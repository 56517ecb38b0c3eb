"""
timestate
=========

Pinned, explicitly materialized time state for declarative infrastructure.

Planning tools cannot read the wall clock without producing a different plan
on every run.  ``timestate`` pins a base timestamp once, derives a target
from it by calendar or duration offset, decides when that target has passed
(forcing the owning record to be replaced), and runs cancellable delays
around record creation and destruction.

Import structure
----------------
`import timestate` is intentionally cheap: only the stdlib-based core is
imported by default.  The SQL layer (*sqlmodel*) is imported only when you
explicitly access :pymod:`timestate.db` or :pymod:`timestate.registry_db`,
and settings (*pydantic-settings*) only through :pymod:`timestate.settings`.

Sub-modules
~~~~~~~~~~~
- :pymod:`timestate.codec`        – canonical RFC3339 text, durations, decomposition
- :pymod:`timestate.arithmetic`   – calendar-aware offset addition
- :pymod:`timestate.offsets`      – target resolution for an offset spec
- :pymod:`timestate.lifecycle`    – expiry / replacement state machine
- :pymod:`timestate.sleep`        – cancellable delays
- :pymod:`timestate.state_codec`  – import identifiers
- :pymod:`timestate.engine`       – lifecycle entry points (`TimeStateEngine`)
- :pymod:`timestate.registry`     – in-memory record registry

Quick start
-----------
>>> from timestate.engine import TimeStateEngine
>>> from timestate.models import OffsetSpec
>>> rec = TimeStateEngine().create(OffsetSpec.of(days=7), base="2024-01-01T00:00:00Z")
>>> rec.target.isoformat()
'2024-01-08T00:00:00+00:00'

"""

__all__ = [
    "codec",
    "arithmetic",
    "offsets",
    "lifecycle",
    "sleep",
    "state_codec",
    "engine",
    "registry",
]

__version__ = "0.1.0"
