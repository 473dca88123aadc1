from setuptools import setup, find_packages

setup(
    name="quat-smoothing",
    version="0.1.0",
    description="Frame-rate independent double exponential smoothing for quaternion streams",
    python_requires=">=3.10",
    packages=find_packages(where="src", include=["quat_smoothing", "quat_smoothing.*"]),
    package_dir={"": "src"},
    install_requires=[
        "numpy>=1.24.0",
        "scipy>=1.10.0",
        "h5py>=3.8.0",
        "matplotlib>=3.7.0",
        "pyyaml>=6.0",
        "tqdm>=4.65.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.3.0",
        ],
    },
)
