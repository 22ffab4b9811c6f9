"""Category endpoints."""
import logging
from typing import List, Optional, Union

from . import service
from .api import client
from .types import Category, Page


def _to_categories(data) -> Union[List[Category], Page[Category]]:
    if isinstance(data, dict):
        return Page.from_json(data, Category.from_json)
    return [Category.from_json(f) for f in data or []]


def _list_categories(page: Optional[int] = None, size: Optional[int] = None,
                     sort: str = 'name,asc') -> Union[List[Category], Page[Category]]:
    """
    Fetch the categories of the signed-in user.

    Paging parameters are only sent when both ``page`` and ``size`` are given.

    Returns:
        A list of categories, or a Page when the server answers with one.
    """
    params = None
    if page is not None and size is not None:
        params = {'page': page, 'size': size, 'sort': sort}
    result = _to_categories(client.get('/categories', params=params))
    logging.debug(f'Fetched categories: {result}')
    return result


def list_categories(page: Optional[int] = None, size: Optional[int] = None,
                    sort: str = 'name,asc') -> Union[List[Category], Page[Category]]:
    return service.start_asynchronous(
        _list_categories, page=page, size=size, sort=sort,
        status_text='Loading categories...'
    )


def _get_category(category_id: int) -> Category:
    return Category.from_json(client.get(f'/categories/{category_id}'))


def get_category(category_id: int) -> Category:
    return service.start_asynchronous(_get_category, category_id, status_text='Loading category...')


def _create_category(name: str) -> Category:
    category = Category.from_json(client.post('/categories', json={'name': name}))
    logging.info(f'Created category "{category.name}"')
    return category


def create_category(name: str) -> Category:
    return service.start_asynchronous(_create_category, name, status_text='Saving category...')


def _update_category(category_id: int, name: str) -> Category:
    category = Category.from_json(client.put(f'/categories/{category_id}', json={'name': name}))
    logging.info(f'Renamed category {category_id} to "{category.name}"')
    return category


def update_category(category_id: int, name: str) -> Category:
    return service.start_asynchronous(_update_category, category_id, name, status_text='Saving category...')


def _delete_category(category_id: int) -> None:
    client.delete(f'/categories/{category_id}')
    logging.info(f'Deleted category {category_id}')


def delete_category(category_id: int) -> None:
    return service.start_asynchronous(_delete_category, category_id, status_text='Deleting category...')


def _search_categories(q: str, page: Optional[int] = None,
                       size: Optional[int] = None) -> Union[List[Category], Page[Category]]:
    params = {'q': q}
    if page is not None:
        params['page'] = page
    if size is not None:
        params['size'] = size
    return _to_categories(client.get('/categories/search', params=params))


def search_categories(q: str, page: Optional[int] = None,
                      size: Optional[int] = None) -> Union[List[Category], Page[Category]]:
    return service.start_asynchronous(
        _search_categories, q, page=page, size=size,
        status_text='Searching categories...'
    )


def as_list(result: Union[List[Category], Page[Category]]) -> List[Category]:
    """The categories of a listing, whether it was paged or not."""
    if isinstance(result, Page):
        return list(result.content)
    return list(result)
