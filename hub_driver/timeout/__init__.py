from hub_driver.timeout.service import TimeoutInterceptor

__all__ = ['TimeoutInterceptor']
