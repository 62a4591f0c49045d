import matplotlib.pyplot as plt
import numpy as np

import chargefield as cf

charges = cf.ChargeSet()
charges.add_positive_charge([0., 0.])

field = cf.FieldEvaluator(charges)
tracer = cf.ContourTracer(field)

line = tracer([0.2, 0.])
print(line)

# The traced points lie on a circle with radius 0.2
r = np.linalg.norm(line.positions, axis=1)
print(f'Radius between {r.min():.8f} and {r.max():.8f} m')

potential = field.potential_at_points(line.positions)
print(f'Largest deviation from V0={line.potential:.3f} V: {np.max(np.abs(potential - line.potential)):.2e} V')

plt.figure()
plt.title('Traced and simplified points')
plt.plot(*line.positions.T, '.', label='Traced')
plt.plot(*line.vertices().T, '-o', label='Simplified')
plt.gca().set_aspect('equal')
cf.show(legend=True)
