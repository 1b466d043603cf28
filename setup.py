from setuptools import setup, find_packages
import re

# Read version from tiptrack/__init__.py
with open('tiptrack/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='tiptrack',
    version=version,
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'PyYAML>=6.0',
        'click>=8.0',
        'pydantic>=2.0.0',
        'rich>=13.0',
    ],
    extras_require={
        'mcp': [
            'mcp[cli]>=1.0.0,<2',
        ],
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'tiptrack=tiptrack.cli.__main__:main',
            'tiptrack-mcp=tiptrack.mcp.server:run_server',
        ],
    },
    author='Personal',
    description='Personal tip income tracking with tax-free threshold estimates.',
    python_requires='>=3.10',
)
