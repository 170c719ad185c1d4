import pathlib

from setuptools import find_packages, setup

HERE = pathlib.Path(__file__).parent
version_file = HERE / "version.txt"

with open(version_file, "r", encoding="utf-8") as fh:
    version = fh.readlines()[-1].strip()

with open(HERE / "README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open(HERE / "requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [
        line.strip()
        for line in fh
        if line.strip() and not line.startswith("#") and not line.startswith("-e")
    ]

setup(
    name="heritage_atlas",
    version=version,
    description="Browse and register cultural properties with 3D captures on an interactive map",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["heritage_atlas", "heritage_atlas.*"]),
    install_requires=requirements,
    extras_require={"test": ["pytest>=8.0", "hypothesis>=6.0"]},
    classifiers=[
        "Programming Language :: Python :: 3.11",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",
    include_package_data=True,
    zip_safe=False,
)
