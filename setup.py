from setuptools import setup, find_packages

setup(
    name="entropymap",
    version="0.1",
    packages=find_packages(exclude=["tests", "scripts"]),
    description="Local Shannon entropy maps for grayscale and color images",
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "scikit-image",
        "opencv-python",
        "tifffile",
        "matplotlib",
        "seaborn",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
