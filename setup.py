#!/usr/bin/env python
"""
Release notes:
* Bump version in ewsautodiscover/__init__.py
* Commit and push changes
* Build package: rm -rf dist/* && python setup.py sdist bdist_wheel
* Push to PyPI: twine upload dist/*
"""
import io
import os

from setuptools import setup, find_packages


__version__ = None
with io.open(os.path.join(os.path.dirname(__file__), 'ewsautodiscover/__init__.py'), encoding='utf-8') as f:
    for l in f:
        if not l.startswith('__version__'):
            continue
        __version__ = l.split('=')[1].strip(' "\'\n')
        break


setup(
    name='ewsautodiscover',
    version=__version__,
    description='Autodiscover the EWS endpoint and server version of a Microsoft Exchange mailbox',
    license='BSD',
    keywords='ews exchange autodiscover microsoft outlook exchange-web-services',
    install_requires=['requests>=2.7', 'lxml>3.0', 'pygments', 'defusedxml>=0.6.0,<0.8'],
    extras_require={
        'test': ['requests_mock', 'flake8'],
    },
    packages=find_packages(exclude=('tests',)),
    tests_require=['requests_mock', 'flake8'],
    python_requires=">=3.5",
    test_suite='tests',
    zip_safe=False,
    classifiers=[
        'Development Status :: 4 - Beta',
        'Topic :: Communications',
        'License :: OSI Approved :: BSD License',
        'Programming Language :: Python :: 3',
    ],
)
