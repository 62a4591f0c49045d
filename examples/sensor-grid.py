import numpy as np

import chargefield as cf

model = cf.ElectrostaticModel()
model.add_positive_charge([-1.1, 0.6])
model.add_positive_charge([1.2, -0.3])
model.add_negative_charge([0.1, -1.1])

grid = model.enable_sensor_grid(spacing=0.5)
print(grid)

magnitudes = grid.field_magnitudes()
strongest = np.argmax(magnitudes)
print(f'Strongest field {magnitudes[strongest]:.4g} V/m at {grid.positions[strongest]}')
print(f'Potential between {grid.potentials.min():.4g} V and {grid.potentials.max():.4g} V')

# Moving a charge updates every sensor on the grid
model.move_charge(model.charge_set.charges[2], [0.1, -1.5])
print(f'After moving the negative charge: {grid.field_magnitudes().max():.4g} V/m')

lines = model.add_many_equipotential_lines(20, rng=np.random.default_rng(0))
print(f'Traced {len(lines)} equipotential lines')

fig, ax = cf.new_figure()
cf.plot_equipotential_lines(lines, ax=ax)
cf.plot_charges(model.charge_set, ax=ax)
cf.show()
