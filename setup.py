from setuptools import setup, find_packages

setup(
    name="applemosaic",
    version="1.0.0",
    description="Play a video as a live mosaic of apple emoji.",
    author="Alvin Kwabena",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=[
        "opencv-python",
        "Pillow>=9.1",
        "numpy",
        "customtkinter",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'applemosaic=applemosaic.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.8',
)
