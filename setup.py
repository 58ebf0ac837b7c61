# This setup.py script installs the ethmetrics agent and its runtime config.
# Test dependencies are available with the "test" extra.

from setuptools import find_packages, setup

setup(
    name="ethmetrics",
    version="1.0.0",
    description="Forward ethtool NIC statistics to spectatord",
    license="MIT",
    python_requires=">=3.9",
    packages=find_packages(include=["ethmetrics", "ethmetrics.*"]),
    package_data={"ethmetrics": ["config/ethmetrics.default"]},
    install_requires=["prometheus_client"],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": [
            "ethmetrics=ethmetrics.agent:main",
        ],
    },
)
