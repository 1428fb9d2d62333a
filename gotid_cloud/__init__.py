"""GOT-ID Cloud: identity fusion and anti-clone verdicts for vehicle scans."""

__version__ = "0.1.0"
