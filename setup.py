from setuptools import find_packages, setup

setup(
    name="pausaler-license",
    version="0.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    package_data={"pausaler_license.client": ["public_key.pem"]},
    install_requires=[
        "pydantic>=2",
        "cryptography",
        "click",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "pausaler-license=pausaler_license.cli:cli",
        ],
    },
)
