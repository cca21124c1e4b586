from setuptools import find_packages, setup

package_name = "geoindex"


def read_requirements():
    with open("requirements.txt", "r") as file:
        return [
            line.strip() for line in file if line.strip() and not line.startswith("#")
        ]


setup(
    name=package_name,
    version="0.0.3",
    packages=find_packages(
        exclude=["tests", "tests.*"]
    ),  # Exclude tests and subpackages
    install_requires=read_requirements(),
    zip_safe=True,
    description="Nearest-record lookup over geographic records with naive, binary-search and k-d tree indexes",
    license="MIT",
    tests_require=["pytest"],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": ["geoindex = geoindex.main:app"],
    },
)
