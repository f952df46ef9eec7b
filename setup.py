#!/usr/bin/env python
""" REST Query Options compiled into MongoDB-style queries, with SqlAlchemy as a back-end """

from setuptools import setup, find_packages

setup(
    name='mongofilter',
    version='1.0.0',
    author='Mark Vartanyan',
    author_email='kolypto@gmail.com',

    url='https://github.com/kolypto/py-mongofilter',
    license='BSD',
    description=__doc__,
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    keywords=['sqlalchemy', 'mongodb', 'rest', 'query'],

    packages=find_packages(exclude=('tests',)),
    scripts=[],
    entry_points={},

    python_requires='>= 3.8',
    install_requires=[
        'sqlalchemy >= 1.4',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-cov',
            'nox',
        ],
    },
    include_package_data=True,

    platforms='any',
    classifiers=[
        # https://pypi.python.org/pypi?%3Aaction=list_classifiers
        'Development Status :: 5 - Production/Stable',
        'Intended Audience :: Developers',
        'Natural Language :: English',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Topic :: Software Development :: Libraries :: Python Modules',
    ],
)
