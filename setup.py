from setuptools import setup, find_packages

setup(
    name="roselib",
    version="0.1.0",
    description="Decoder and scene reconstruction for ROSE Online client assets",
    author="roselib contributors",
    packages=find_packages(include=["roselib", "roselib.*"]),
    install_requires=[
        "numpy>=1.20.0",            # Vertex/height buffers
        "construct>=2.10",          # Fixed-size binary records
        "pygltflib>=1.15",          # glTF export
        "Pillow>=9.0",              # Heightmap images
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "rose-conv=roselib.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Games/Entertainment",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    python_requires=">=3.8",
    zip_safe=False,
)
