# Based on:
# https://betterscientificsoftware.github.io/
# python-for-hpc/tutorials/python-pypi-packaging/

from setuptools import setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="krylovexp",
    version="0.1.0",
    description="Krylov subspace factorizations and the action of the matrix exponential",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="GPLv3",
    packages=["krylovexp"],
    python_requires=">=3.7",
    install_requires=[
        "numpy",
        "scipy",
        "termcolor",
    ],
    extras_require={
        "test": ["pytest"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Operating System :: OS Independent",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Mathematics"
    ],
)
