#! /usr/bin/env python
"""Installs Reap using setuptools

Run:
    pip install .
to install the package from the source archive.
"""
import os
from setuptools import setup

version = [
    (line.split('=')[1]).strip().strip('"').strip("'")
    for line in open(
        os.path.join(os.path.dirname(__file__), 'reap', '__init__.py')
    )
    if line.startswith('__version__')
][0]

if __name__ == "__main__":
    setup(
        name="reap",
        version=version,
        description="Retained-memory analysis for Ruby heap dumps",
        install_requires=[],
        extras_require={
            'gui': [
                'SquareMap >= 1.0.5',
                'wxPython',
            ],
            'test': [
                'pytest',
            ],
        },
        license="BSD",
        package_dir={'reap': 'reap',},
        packages=['reap',],
        python_requires='>=3.6',
        options={'sdist': {'formats': ['gztar', 'zip'],},},
        zip_safe=False,
        entry_points={
            'console_scripts': ['reap=reap.reap:main',],
            'gui_scripts': ['reapview=reap.heapview:main',],
        },
        classifiers=[
            """License :: OSI Approved :: BSD License""",
            """Programming Language :: Python :: 3""",
            """Topic :: Software Development :: Debuggers""",
            """Intended Audience :: Developers""",
        ],
        keywords='memory,heap,ruby,dominator,profile',
        long_description="""Retained-memory analysis for Ruby heap dumps

Reports the object kinds using the most memory and the objects retaining
the most memory (via the dominator tree of the object graph), optionally
writing a Graphviz view of the most relevant retention paths.""",
        platforms=['Any'],
    )
