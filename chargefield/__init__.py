"""Welcome!

chargefield computes the electrostatic field of a small number of point charges in the plane and traces the
equipotential lines of that field. It is meant as the numerical core of interactive applications: the application
supplies the positions of the charges and receives fields, potentials and polylines ready to be drawn.

# Usage

Charges are collected in a `chargefield.charges.ChargeSet`. Every charge has a magnitude of +1 or -1 (one nano Coulomb).
The field and potential of the active charges are computed by `chargefield.field.FieldEvaluator`. The
`chargefield.contour.ContourTracer` traces the equipotential line through a given seed point, and returns a
`chargefield.contour.ContourLine` holding the traced points, the simplified points (see `chargefield.simplify`)
and whether the line is closed.

Most applications will want to use `chargefield.model.ElectrostaticModel`, which combines all of the above
and discards the equipotential lines whenever the charge configuration changes.

```python
import chargefield as cf

charges = cf.ChargeSet()
charges.add_positive_charge([0., 0.])

field = cf.FieldEvaluator(charges)
line = cf.ContourTracer(field).trace([0.2, 0.])

print(line.closed, len(line.positions), len(line.simplified_positions))
```

# Configuration

All tunable constants (Coulomb constant, step lengths, step counts, close approach radius, simplification tolerance, ...)
live in `chargefield.settings.Settings`. The log level can be changed using `chargefield.logging.set_log_level` or the
environment variable CHARGEFIELD_LOG_LEVEL.

# Units

Lengths are in meters, charges in nano Coulomb, fields in V/m and potentials in V.
"""

__pdoc__ = {}
__pdoc__['util'] = False
__pdoc__['typing'] = False
__pdoc__['chargefield.contour.ContourTracer.__call__'] = True

from . import typing
from . import logging
from . import settings
from . import charges
from . import field
from . import simplify
from . import contour
from . import sensors
from . import model
from . import plotting

from .logging import set_log_level, LogLevel
from .settings import Settings
from .charges import Charge, ChargeSet
from .field import FieldEvaluator
from .simplify import distance_from_line
from .contour import ContourLine, ContourTracer, TraceJob, trace_contour
from .sensors import FieldSensor, PotentialSensor, SensorGrid
from .model import ElectrostaticModel
from .plotting import new_figure, plot_charges, plot_equipotential_lines, show
