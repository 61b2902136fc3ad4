from setuptools import setup, find_packages

package_name = 'stomp_costs'

setup(
    name=package_name,
    version='0.1.0',
    packages=find_packages(where='src'),
    package_dir={'': 'src'},
    python_requires='>=3.10',
    install_requires=['setuptools', 'numpy', 'scipy', 'pin'],
    extras_require={
        'test': ['pytest'],
    },
    zip_safe=True,
    description='STOMP trajectory cost functions based on voxel distance fields',
    license='MIT',
    entry_points={
        'console_scripts': [],
    },
)
