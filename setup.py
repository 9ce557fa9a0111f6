from setuptools import find_packages, setup

setup(
    name="crystgen",
    version="0.1.0",
    description="Generate periodic crystal structures from space group symmetry",
    python_requires=">=3.8",
    package_dir={"": "src"},
    packages=find_packages("src"),
    package_data={"crystgen.crystal": ["sgdata.json"]},
    install_requires=["numpy", "scipy"],
    extras_require={
        "test": ["pytest"],
        "docs": ["sphinx", "myst-parser", "furo"],
    },
    entry_points={
        "console_scripts": ["crystgen-build=crystgen.cmd.build:main"],
    },
)
