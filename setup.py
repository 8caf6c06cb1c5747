"""pip setup for the HideLoginNotice addon and its client"""

import glob
import pathlib
import sys

from setuptools import setup


if sys.version_info < (3, 7):
    raise RuntimeError("hideloginnotice requires Python 3.7")

REPO = pathlib.Path(__file__).parent  # type: pathlib.Path

VERSION_PATH = REPO / 'hideloginnotice' / 'version.py'
VERSION = VERSION_PATH.read_text().strip().split(' ')[-1].strip('"')


def read_requirements(name):
    """parse a pip requirements file

    Args:
        name (str): file name inside the `requirements` directory

    Returns:
        list[str]: the requirement lines without comments
    """
    requirements = []
    path = REPO / 'requirements' / name
    for line in path.read_text().split('\n'):
        line = line.strip()
        if not line or line[0] == '#':
            continue
        requirements.append(line)
    return requirements


PACKAGES = [path[:-12].replace('/', '.')
            for path in glob.glob('hideloginnotice/**/__init__.py',
                                  recursive=True)]

setup(
    name='hideloginnotice',
    version=VERSION,
    install_requires=read_requirements('requirements.txt'),
    extras_require={
        'test': read_requirements('requirements-dev.txt'),
    },
    packages=PACKAGES,
    entry_points={
        'console_scripts': [
            'hideloginnotice=hideloginnotice.__main__:main',
        ],
    },
)
