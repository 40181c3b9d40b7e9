import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="readsplit",
    version="0.0.1",
    author="readsplit developers",
    description="barcode assignment and adapter splitting of sequencing reads",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    install_requires = ['pysam', 
                        'regex', 
                        'pyaml',
                        'rich',
                        'polars'],
    extras_require = {'test': ['pytest']},
    entry_points = {
        'console_scripts': ['readsplit=readsplit.cli:main'],
    },
    python_requires='>=3.10',
)
# python3 setup.py sdist bdist_wheel
