import setuptools

setuptools.setup(
    name="amlchksum",
    version="1.0.0",
    description=("Amlogic boot image SD header and SHA-256 checksum tool"),
    license="Apache Software License",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        'cryptography>=3.1',
        'click',
        'PyYAML>=5.1',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        "console_scripts": [
            "amlchksum=amlchksum.main:amlchksum",
            "aml_chksum=amlchksum.main:sign",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Development Status :: 4 - Beta",
        "Topic :: Software Development :: Build Tools",
        "License :: OSI Approved :: Apache Software License",
    ],
)
