"""
Setup script for the Two-View Reconstruction package.
"""

from setuptools import setup, find_packages
import os


def read_readme():
    """Read README file for long description."""
    if os.path.exists('README.md'):
        with open('README.md', 'r', encoding='utf-8') as f:
            return f.read()
    return "Relative pose and sparse structure from two calibrated views"


# Core requirements (always installed)
install_requires = [
    'opencv-python>=4.5.1',
    'numpy>=1.19.0',
    'scipy>=1.6.0',
    'pandas>=1.2.0'
]

# Optional dependencies for different use cases
extras_require = {
    'dev': [
        'pytest>=6.0.0',
        'pytest-cov>=2.12.0',
        'black>=21.0.0',
        'isort>=5.9.0',
        'flake8>=3.9.0'
    ],
}
extras_require['test'] = extras_require['dev'][:2]

setup(
    name="two-view-reconstruction",
    version="1.0.0",
    description="Fundamental/essential matrix estimation, pose recovery and "
                "triangulation for two calibrated views",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=['TwoViewReconstruction', 'TwoViewReconstruction.*']),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Image Processing",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    python_requires=">=3.8",
    install_requires=install_requires,
    extras_require=extras_require,
    keywords=[
        "computer vision",
        "structure from motion",
        "fundamental matrix",
        "essential matrix",
        "triangulation",
        "opencv"
    ],
)
