from setuptools import setup

setup(
    name='chargefield',
    version='0.1.0',
    description='Electric field, potential and equipotential lines of point charges in the plane',
    author='Léon van Velzen',
    author_email='leonvanvelzen@protonmail.com',
    keywords=['electrostatic', 'electric field', 'potential', 'equipotential', 'point charge', 'contour', 'tracing'],
    license='MPL 2.0',
    packages=['chargefield'],
    long_description = open('README.md').read(),
    long_description_content_type='text/markdown',
    install_requires=['matplotlib', 'numpy', 'scipy', 'typing_extensions'],
    extras_require={
        'test': ['pytest']
    },
    python_requires='>=3.8',
)
