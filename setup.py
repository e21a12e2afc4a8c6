import os
import re
import setuptools
import sys

DESCRIPTION = "rwconcern models MongoDB read and write concerns and decides, " \
              "operation by operation, which of them belong in the command."

if sys.version_info[:2] < (3, 7):
    print("ERROR: this package requires Python 3.7 or later!")
    sys.exit(1)

with open("README.md", "r") as fh:
    long_description = fh.read()

with open(os.path.join("rwconcern", "__init__.py")) as f:
    version = re.search(r"^VERSION \= \"([0-9.]+)\"", f.read(),
                        re.MULTILINE).group(1)

setuptools.setup(
    name="rwconcern",
    version=version,
    description=DESCRIPTION,
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.7',
    install_requires=[
        'pymongo>=4.0,<5.0',
    ],
    extras_require={
        'test': ['pytest'],
    },
)
