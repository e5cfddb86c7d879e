from fastapi import APIRouter, Depends, HTTPException
from typing import List

from api.dependencies import get_assembler, get_catalog, get_retriever
from core.catalog import ArtistCatalog
from core.graph_builder import GraphAssembler
from core.models import ArtistDetail, ArtistGraph, ArtworkDetail, ResultItem, SearchFilter, SearchOptions, SortOrder
from core.retriever import HybridRetriever

router = APIRouter(
    tags=["Gallery"]
)

@router.get("/search", response_model=List[ResultItem])
def search(q: str = "", semantic: bool = False,
           filter: SearchFilter = SearchFilter.ALL, sort: SortOrder = SortOrder.RELEVANCE,
           retriever: HybridRetriever = Depends(get_retriever)):
    """Keyword search over artists and artworks, optionally fused with vector similarity."""
    options = SearchOptions(semantic=semantic, filter=filter, sort=sort)
    return retriever.search(q, options)

@router.get("/artists/{name}", response_model=ArtistDetail)
def get_artist(name: str, catalog: ArtistCatalog = Depends(get_catalog)):
    detail = catalog.get_artist_detail(name)
    if detail is None:
        raise HTTPException(status_code=404, detail=f"Artist '{name}' not found.")
    return detail

@router.get("/artists/{name}/graph", response_model=ArtistGraph)
def get_artist_graph(name: str, assembler: GraphAssembler = Depends(get_assembler)):
    """The artist's neighborhood as a force-graph payload."""
    graph = assembler.build_graph(name)
    if graph is None:
        raise HTTPException(status_code=404, detail=f"No graph available for artist '{name}'.")
    return graph

@router.get("/artworks/{artwork_id}", response_model=ArtworkDetail)
def get_artwork(artwork_id: str, catalog: ArtistCatalog = Depends(get_catalog)):
    detail = catalog.get_artwork_detail(artwork_id)
    if detail is None:
        raise HTTPException(status_code=404, detail=f"Artwork '{artwork_id}' not found.")
    return detail
