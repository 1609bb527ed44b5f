from setuptools import setup, find_packages

setup(
    name="norm_constraints",
    version="0.1.0",
    description="Per-unit L2 norm constraints (min/max, max, unit) for Keras weights",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "keras>=3.0",
        "numpy",
        "tensorflow",
    ],
    extras_require={
        'test': ['pytest'],
        'dev': ['pytest', 'pylint']
    }
)
