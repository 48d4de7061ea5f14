# Copyright 2016 MongoDB, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Setup script."""
import os.path
import re
from setuptools import setup, find_packages

CUR_DIR = os.path.abspath(os.path.dirname(__file__))


def read(name):
    with open(os.path.join(CUR_DIR, name), 'r') as f:
        return f.read()


def version():
    try:
        return re.findall(r"^__version__ = '([^']+)'\r?$",
                          read(os.path.join('motor_populate', '__init__.py')),
                          re.M)[0]
    except IndexError:
        raise RuntimeError('Could not determine version.')


LONG_DESCRIPTION = '\n\n'.join((read('README.rst'), read('CHANGELOG.rst')))

CLASSIFIERS = [
    'Development Status :: 3 - Alpha',
    'Intended Audience :: Developers',
    'License :: OSI Approved :: Apache Software License',
    'Operating System :: OS Independent',
    'Programming Language :: Python',
    'Programming Language :: Python :: 3',
    'Programming Language :: Python :: Implementation :: CPython',
    'Topic :: Database',
    'Topic :: Software Development :: Libraries :: Python Modules',
]

requires = [
    'pymongo>=4.0',
    'motor>=3.0',
]

setup(
    name='motor_populate',
    version=version(),
    author='ilex',
    author_email='ilexhostmaster@gmail.com',
    license='Apache License, Version 2.0',
    include_package_data=True,
    description='Batched reference population for MongoDB documents '
                'using Motor.',
    long_description=LONG_DESCRIPTION,
    packages=find_packages(exclude=['test', 'test.*']),
    platforms=['any'],
    python_requires='>=3.7',
    classifiers=CLASSIFIERS,
    test_suite='test.get_test_suite',
    install_requires=requires,
    extras_require={'tornado': ['tornado']}
)
