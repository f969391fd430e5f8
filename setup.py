from setuptools import find_packages, setup
import os

# Function to read the requirements from requirements.txt
def read_requirements(filename='requirements.txt'):
    """Read requirements from a file and return as a list."""
    with open(os.path.join(os.path.dirname(__file__), filename), 'r') as f:
        lines = f.readlines()
    # Filter out comments and empty lines
    requirements = [line.strip() for line in lines if line.strip() and not line.startswith('#')]
    return requirements

setup(
    name='feecast',
    version='0.1',
    description='Seasonal forecasting and anomaly detection for priority fee time series',
    packages=find_packages('src'),
    package_dir={'': 'src'},
    include_package_data=True,
    zip_safe=False,
    python_requires='>=3.8',
    install_requires=read_requirements(),  # Read from requirements.txt
    extras_require={'test': ['pytest'], 'examples': ['fire']},
)
