from setuptools import setup, find_packages

setup(
    name="pulse_metrics",
    version="0.1.0",
    description="Heart rate, pulse transit time and blood-pressure proxy from PPG waveforms",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.24",
        "scipy>=1.10",
    ],
    extras_require={
        "dev": ["pytest>=7.4"],
    },
    entry_points={
        "console_scripts": [
            "pulse-metrics=main:main",
        ]
    },
)
