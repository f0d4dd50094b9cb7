from setuptools import setup, find_namespace_packages

setup(
    name="hmac_timing_attack",
    version="0.1",
    package_dir={'': 'src'},
    packages=find_namespace_packages(where='src', include=['hmac_timing*']),
    python_requires='>=3.8',
    install_requires=[
        'pyyaml',
        'numpy',
        'scipy',
        'python-dotenv'
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'hmac-timing=hmac_timing.main:main',
        ],
    },
)
