#!/usr/bin/env python
from setuptools import setup, find_packages

with open('README.md', 'r', encoding='utf-8') as f:
    long_description = f.read()

setup(
    name='array_pattern',
    version='0.1.0',
    description='Far-field gain computation for phased antenna arrays',
    long_description=long_description,
    long_description_content_type='text/markdown',
    author='Justin Long',
    author_email='justinwlong1@gmail.com',
    url='https://github.com/freespacemind/array_pattern',
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        'numpy>=1.20.0',
        'scipy>=1.7.0',
        'xarray>=0.19.0',
        'h5py>=3.0.0',        # For HDF5 pattern output
    ],
    extras_require={
        'dev': [
            'pytest>=6.0.0',
            'pytest-cov>=2.10.0',
            'black>=20.8b1',
            'flake8>=3.8.0',
            'isort>=5.0.0',
        ],
    },
    python_requires='>=3.7',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Science/Research',
        'Topic :: Scientific/Engineering :: Physics',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.7',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
    ],
    keywords='antenna, phased array, beamforming, radiation pattern, gain',
    entry_points={
        'console_scripts': [
            'array-pattern=array_pattern.cli:main',
        ],
    },
)
