"""
Централизованные константы для browser-automation.

Все magic numbers собраны здесь для удобства настройки.
"""


class Timeouts:
    """Таймауты в миллисекундах."""

    # Ожидание network idle после навигации
    NETWORK_IDLE = 60000

    # Ожидание видимого элемента для одного кандидата
    CANDIDATE = 5000  # click / fill
    LOGIN_CANDIDATE = 2000  # шаги login()


class Delays:
    """Фиксированные паузы в миллисекундах."""

    SETTLE = 5000  # После загрузки страницы
    CLEAR = 500  # Между очисткой поля и вводом
    TYPE_CHAR = 100  # Между символами при вводе
    KEEP_OPEN = 5000  # Браузер открыт после последнего действия
    OBSERVE = 30000  # Наблюдение за консолью в конце login()
