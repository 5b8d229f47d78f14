#!/usr/bin/env python
import os

from setuptools import setup, find_packages


def read(fname):
    # Dynamically generate setup(long_description)
    return open(os.path.join(os.path.dirname(__file__), fname)).read()

setup(name='salvo',
      version="0.1.0",
      description='Run commands across routers, switches and unix hosts over ssh or telnet',
      url='http://github.com/mpenning/salvo',
      author='David Michael Pennington',
      author_email='mike@pennington.net',
      license='GPL',
      platforms='any',
      keywords='ssh telnet pexpect network automation',
      entry_points={"console_scripts": ["salvo=salvo.cli:main"]},
      long_description=read('README.rst'),
      include_package_data=True,
      packages=find_packages(exclude=["tests"]),
      zip_safe=False,
      python_requires=">=3.7",
      install_requires=["pexpect", "transitions", "textfsm", "traits", "loguru", "rich", "arrow"],
      extras_require={"test": ["pytest"]},
      setup_requires=[],
      classifiers=[
          'Development Status :: 4 - Beta',
          'Environment :: Console',
          'Intended Audience :: Developers',
          'Intended Audience :: System Administrators',
          'Intended Audience :: Information Technology',
          'License :: OSI Approved :: GNU General Public License (GPL)',
          'Natural Language :: English',
          'Operating System :: POSIX',
          'Programming Language :: Python :: 3',
          'Topic :: System :: Networking',
          ],
     )
