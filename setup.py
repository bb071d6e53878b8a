#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import os
from setuptools import setup

scriptPath = os.path.abspath( os.path.dirname( __file__ ) )
with open( os.path.join( scriptPath, 'README.md' ), encoding = 'utf-8' ) as file:
    readmeContents = file.read()

setup(
    name             = 'iso2repo',
    version          = '0.1.0',

    description      = 'Publish Debian package repositories stored inside ISO and TAR archives',
    license          = 'MIT',
    classifiers      = [ 'License :: OSI Approved :: MIT License',
                         'Development Status :: 4 - Beta',
                         'Natural Language :: English',
                         'Operating System :: POSIX :: Linux',
                         'Operating System :: Unix',
                         'Programming Language :: Python :: 3',
                         'Programming Language :: Python :: 3.9',
                         'Programming Language :: Python :: 3.10',
                         'Programming Language :: Python :: 3.11',
                         'Programming Language :: Python :: 3.12',
                         'Topic :: System :: Archiving',
                         'Topic :: System :: Software Distribution' ],

    long_description = readmeContents,
    long_description_content_type = 'text/markdown',

    python_requires  = '>=3.9',
    packages         = [ 'iso2repo', 'iso2repocore', 'iso2repocore.mountsource' ],
    package_dir      = { 'iso2repocore': 'core/iso2repocore' },
    install_requires = [ 'mfusepy' ],
    # argcomplete is only needed for shell completion and pytest only for running the tests.
    extras_require   = {
        'full' : [ 'argcomplete' ],
        'test' : [ 'pytest' ],
    },
    entry_points = { 'console_scripts': [ 'iso2repo=iso2repo.cli:cli' ] }
)
