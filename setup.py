from setuptools import setup, find_packages

# - Read version
exec(open("synsim/version.py").read())

setup_args = {
    "name": "synsim",
    "author": "synsim developers",
    "version": __version__,
    "packages": find_packages(include=["synsim", "synsim.*"]),
    "install_requires": ["numpy", "scipy"],
    "extras_require": {
        "tests": [
            "pytest>=6.0",
        ],
        "extras": [
            "tqdm",
        ],
        "all": [
            "synsim[tests, extras]",
        ],
    },
    "description": "A time-stepped simulator for networks of spiking and dynamical nodes, with precisely-timed synaptic current integration",
    "long_description": open("README.md").read(),
    "long_description_content_type": "text/markdown",
    "classifiers": [
        "Development Status :: 3 - Alpha",
        "Programming Language :: Python :: 3",
    ],
    "keywords": "spiking neural network SNN simulation synapse",
    "python_requires": ">=3.8",
    "include_package_data": True,
}

setup(**setup_args)
