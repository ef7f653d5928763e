import io
import re

from setuptools import setup
from os.path import join, dirname


def requirements(dev=False):
    name = 'dev-requirements.txt' if dev else 'requirements.txt'
    with open(join(dirname(__file__), name), 'r') as f:
        return f.readlines()


VERSION_FILE = "marshalcat/__init__.py"
with io.open(VERSION_FILE, "rt", encoding="utf8") as f:
    version = re.search(r'__version__ = ([\'"])(.*?)\1', f.read()).group(2)


setup(
    name='marshalcat',
    version=version,
    license='MIT',
    description='JSON encoding library for Python with per-type marshal '
                'hooks and omit-if-empty record fields',
    long_description=__doc__,
    packages=['marshalcat', 'marshalcat.ext'],
    zip_safe=False,
    platforms='any',
    python_requires='>=3.10',
    install_requires=requirements(),
    extras_require={
        'sqla': ['SQLAlchemy'],
        'mongo': ['mongoengine', 'pymongo'],
        'test': requirements(dev=True),
    },
    classifiers=[
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Software Development :: Libraries :: Python Modules',
    ],
)
