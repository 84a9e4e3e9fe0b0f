from setuptools import setup, find_packages

setup(
    name='s3repo',
    version='0.1.0',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    python_requires='>=3.10',
    install_requires=[
        'boto3',
        'botocore',
        'rich',
        'PyYAML',
        'platformdirs',
    ],
    extras_require={
        'test': [
            'pytest<9',
        ],
    },
    entry_points={
        'console_scripts': [
            's3repo=s3repo.cli:main',
        ],
    },
)
