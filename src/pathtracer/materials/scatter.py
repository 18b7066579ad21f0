"""Outcome codes shared by every material's scatter function.

Each ``scatter_*`` function returns ``(direction, color, outcome)``:

    ABSORBED:  the path ends and contributes black; ``direction`` and
               ``color`` are meaningless.
    SCATTERED: the path continues along ``direction`` and ``color`` is the
               attenuation applied to whatever that ray brings back.
    EMITTED:   the path ends and ``color`` is the radiance emitted toward
               the viewer.

The integer constants are what kernels compare against; the enum is for
host-side code and tests.
"""

from enum import IntEnum


class ScatterOutcome(IntEnum):
    """Result of a material interaction."""

    ABSORBED = 0
    SCATTERED = 1
    EMITTED = 2


ABSORBED = int(ScatterOutcome.ABSORBED)
SCATTERED = int(ScatterOutcome.SCATTERED)
EMITTED = int(ScatterOutcome.EMITTED)
