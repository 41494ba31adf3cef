from setuptools import setup, find_packages

package_name = 'led_relay'

setup(
    name=package_name,
    version='1.0.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.10',
    install_requires=[
        'setuptools',
        'fastapi>=0.104.0',
        'uvicorn>=0.24.0',
        'websockets>=12.0',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
            'httpx',
        ],
    },
    zip_safe=True,
    maintainer='Hasan Çoban',
    maintainer_email='hasancoban@std.iyte.edu.tr',
    description='WebSocket relay between an ESP32 LED controller and browsers',
    license='MIT',
    entry_points={
        'console_scripts': [
            'led_relay = led_relay.main:main',
        ],
    },
)
