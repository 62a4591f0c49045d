import matplotlib.pyplot as plt
import numpy as np

import chargefield as cf

model = cf.ElectrostaticModel()
model.add_positive_charge([-0.5, 0.])
model.add_negative_charge([0.5, 0.])

# Seeds along the line connecting the charges, the middle one gives the open line V=0.
seeds = [[x, 0.] for x in np.linspace(-1.5, 1.5, 13)]

for s in seeds:
    line = model.add_equipotential_line(s)
    if line is not None:
        print(line)

fig, ax = cf.new_figure()
plt.title('Equipotential lines of a dipole')
cf.plot_equipotential_lines(model.equipotential_lines, ax=ax, show_labels=True)
cf.plot_charges(model.charge_set, ax=ax)
ax.set_xlim(-4, 4)
ax.set_ylim(-2.5, 2.5)
cf.show()
