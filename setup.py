import os
from setuptools import setup, find_namespace_packages
from setuptools.command.build_py import build_py as _build

CLASSIFIERS = [
    'Operating System :: POSIX',
    'Operating System :: MacOS :: MacOS X',
    'Intended Audience :: Education',
    'Programming Language :: Python',
    'Programming Language :: Python :: 3',
    'Topic :: Internet :: WWW/HTTP',
    'Topic :: Software Development :: Libraries'
]

pkgdir = os.path.dirname(os.path.abspath(__file__))

def get_version():
    out = "dev"
    versfile = os.path.join(pkgdir, 'VERSION')
    if os.path.exists(versfile):
        with open(versfile) as fd:
            parts = fd.readline().split()
        if len(parts) > 0:
            out = parts[-1]
    else:
        out = "(unknown)"
    return out

def write_version_mod(version):
    ucamdir = os.path.join(pkgdir, 'python', 'ucam')
    for pkg in [f for f in os.listdir(ucamdir) \
                  if not f.startswith('_') and not f.startswith('.')
                     and os.path.isdir(os.path.join(ucamdir, f))]:
        print("setting version for ucam."+pkg)
        versmodf = os.path.join(ucamdir, pkg, "version.py")
        with open(versmodf, 'w') as fd:
            fd.write('"""')
            fd.write("""
An identification of the subsystem version.  Note that this module file gets 
(over-) written by the build process.  
""")
            fd.write('"""\n\n')
            fd.write('__version__ = "')
            fd.write(version)
            fd.write('"\n')

class build(_build):

    def run(self):
        write_version_mod(get_version())
        _build.run(self)

setup(name='ucam.lookup',
      version=get_version(),
      description="ucam.lookup: a python client for the University of Cambridge Lookup directory",
      url='https://www.lookup.cam.ac.uk/',
      package_dir={'': 'python'},
      packages=find_namespace_packages(where='python', include=['ucam.*']),
      scripts=[ 'scripts/ucamlookup.py' ],
      install_requires=[ 'requests', 'PyYAML' ],
      extras_require={ 'test': [ 'pytest' ] },
      python_requires='>=3.8',
      cmdclass={'build_py': build},
      classifiers=CLASSIFIERS,
      zip_safe=False
)
