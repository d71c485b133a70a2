from setuptools import find_packages, setup

package_name = "mcl_localizer"

setup(
    name=package_name,
    version="0.1.0",
    packages=find_packages(exclude=["test"]),
    install_requires=["setuptools", "numpy", "scipy", "pydantic>=2", "pyyaml"],
    extras_require={"test": ["pytest"]},
    zip_safe=True,
    description="Monte Carlo localization of a mobile robot against a static 3D point-cloud map",
    license="Apache-2.0",
    tests_require=["pytest"],
)
